"""Activity domain - Append-only event log and status history reconstruction"""
