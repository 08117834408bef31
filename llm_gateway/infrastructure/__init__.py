"""基础设施层：日志等与业务无关的支撑能力。"""
