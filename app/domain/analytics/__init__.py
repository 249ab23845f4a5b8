"""Analytics domain - Reporting windows and freelancer performance aggregation"""
