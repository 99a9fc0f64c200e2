"""
核心模块 - 模型、配置与异常
"""
