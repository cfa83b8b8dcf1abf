"""
Infrastructure package - external dependencies and integrations.

Modules:
- supabase.py - Supabase client
- rekognition.py - AWS Rekognition face collections
- storage.py - Photo byte fetching
"""

from infrastructure.supabase import SupabaseClient
from infrastructure.rekognition import RekognitionClient, create_rekognition_client
from infrastructure.storage import PhotoFetcher

__all__ = [
    'SupabaseClient',
    'RekognitionClient',
    'create_rekognition_client',
    'PhotoFetcher',
]
