"""
Architectural Showcase Portal
Blueprint registry.
"""
