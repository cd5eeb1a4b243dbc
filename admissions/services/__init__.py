"""
Services module - MongoDB-backed business logic, one service class per concern.
"""
