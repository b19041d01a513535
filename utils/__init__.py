"""
工具包
"""
