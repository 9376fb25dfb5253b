"""
Report users and roles, and buildpack usage, across a Cloud Foundry
installation by walking the Cloud Controller API.
"""

__version__ = "0.7.0"
