"""Session handling and password checks"""
