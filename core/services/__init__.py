"""
Business logic for school records, kept out of views and serializers.
"""
