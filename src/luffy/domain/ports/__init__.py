from .extractor import ExtractorPort, StreamExtractorPort
from .provider import ProviderPort

__all__ = [
    "ExtractorPort",
    "ProviderPort",
    "StreamExtractorPort",
]
