"""Classifier plugins. Importing this package registers every kind."""

from .compute import EC2InstanceClassifier
from .storage import EBSVolumeClassifier, S3BucketClassifier
from .database import RDSInstanceClassifier
from .serverless import LambdaFunctionClassifier

__all__ = [
    "EC2InstanceClassifier",
    "EBSVolumeClassifier",
    "S3BucketClassifier",
    "RDSInstanceClassifier",
    "LambdaFunctionClassifier",
]
