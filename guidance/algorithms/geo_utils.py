"""Geodesy helpers for pedestrian guidance"""
import math

from ..core.data_types import Coordinate


class GeoUtils:
    """Great-circle calculations on a spherical Earth"""
    
    EARTH_RADIUS = 6371000  # meters
    
    @staticmethod
    def distance_meters(a: Coordinate, b: Coordinate) -> float:
        """
        Great-circle distance between two coordinates (haversine formula)
        
        Args:
            a, b: Coordinates in decimal degrees, no range validation
            
        Returns:
            Distance in meters, 0.0 for identical points
        """
        lat1_rad = math.radians(a.latitude)
        lat2_rad = math.radians(b.latitude)
        delta_lat = math.radians(b.latitude - a.latitude)
        delta_lon = math.radians(b.longitude - a.longitude)
        
        h = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
        
        return GeoUtils.EARTH_RADIUS * c
    
    @staticmethod
    def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
        """
        Initial compass bearing from a to b
        
        When a == b the direction is undefined; atan2(0, 0) yields 0,
        so the result is 0.0 (north).
        
        Returns:
            Bearing in degrees [0, 360), 0 = North, 90 = East
        """
        lat1_rad = math.radians(a.latitude)
        lat2_rad = math.radians(b.latitude)
        delta_lon = math.radians(b.longitude - a.longitude)
        
        y = math.sin(delta_lon) * math.cos(lat2_rad)
        x = (math.cos(lat1_rad) * math.sin(lat2_rad) -
             math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon))
        
        bearing_deg = (math.degrees(math.atan2(y, x)) + 360) % 360
        # (-tiny + 360) % 360 rounds to 360.0 in floating point
        if bearing_deg >= 360.0:
            bearing_deg = 0.0
        return bearing_deg
    
    @staticmethod
    def normalize_bearing_delta(delta: float) -> float:
        """
        Fold a bearing difference into [-180, 180] with a single correction
        
        Args:
            delta: Difference of two bearings, roughly within [-360, 360]
            
        Returns:
            Signed turn angle (negative = left, positive = right)
        """
        if delta > 180:
            return delta - 360
        if delta < -180:
            return delta + 360
        return delta
    
    @staticmethod
    def destination_point(origin: Coordinate, bearing: float, distance: float) -> Coordinate:
        """
        Point reached from origin after travelling distance meters on bearing
        
        Returns:
            Destination coordinate
        """
        lat_rad = math.radians(origin.latitude)
        lon_rad = math.radians(origin.longitude)
        bearing_rad = math.radians(bearing)
        
        angular_distance = distance / GeoUtils.EARTH_RADIUS
        
        dest_lat = math.asin(
            math.sin(lat_rad) * math.cos(angular_distance) +
            math.cos(lat_rad) * math.sin(angular_distance) * math.cos(bearing_rad)
        )
        
        dest_lon = lon_rad + math.atan2(
            math.sin(bearing_rad) * math.sin(angular_distance) * math.cos(lat_rad),
            math.cos(angular_distance) - math.sin(lat_rad) * math.sin(dest_lat)
        )
        
        return Coordinate(math.degrees(dest_lat), math.degrees(dest_lon))
