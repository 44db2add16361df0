"""
Store Map Service.

Flask backend that stores a retail store's physical layout (nested sectors,
products, walls, beacons, map elements) and serves it to the map renderer.
"""

__version__ = '1.0.0'
