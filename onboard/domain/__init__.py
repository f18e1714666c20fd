"""
Domain layer: business logic, no CLI dependencies
"""
