"""
Terminal client for the Task Tracker API.
"""
