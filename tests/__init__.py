"""
Unit tests package for the OverWatch SES CDK application.
"""
