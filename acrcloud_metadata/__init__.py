"""ACRCloud integration modules."""

from acrcloud_metadata.client import AcrCloudError, AcrCloudMetadataClient

__all__ = ["AcrCloudError", "AcrCloudMetadataClient"]
