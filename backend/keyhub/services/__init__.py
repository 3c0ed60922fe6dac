"""
Domain services - role policy, ratings, signatures and integrations
"""
