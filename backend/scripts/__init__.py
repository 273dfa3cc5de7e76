"""
Backend Scripts Module

Utility scripts for database setup.

Available scripts:
    - seed_data.py: Creates directory users and the standard onboarding
      and offboarding templates

Usage:
    python -m scripts.seed_data
"""
