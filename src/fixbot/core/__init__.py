"""Core domain package for fixbot.

Core contains normalization, language verification, mistake selection and
reply composition without any Reddit or delivery-specific code, keeping the
detection logic portable.
"""
