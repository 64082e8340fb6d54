"""
regionfence Modules Package

- geofence_manager: region-restricted geofence validation
"""
