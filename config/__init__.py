"""Runtime configuration"""
