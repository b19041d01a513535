"""
Routers package
路由层
"""
