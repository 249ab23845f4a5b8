"""Workflow domain - Work item lifecycle and status-driven side effects"""
