"""Engine configuration"""
