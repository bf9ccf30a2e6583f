"""
CLI Commands

Sub-command groups registered on the main plugpipe application.
"""
