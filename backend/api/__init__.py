"""
HTTP routers for the strategy review API
"""
