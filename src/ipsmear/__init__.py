"""Public package exports for the track-smearing engine."""
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


from .binning import BinTable, covariance_key
from .codec import DecodedTrack, decode_track_parameters, encode_track_parameters
from .config import SmearingConfig
from .covariance import (
    CholeskyCache,
    CovarianceBank,
    CovarianceSource,
    JsonCovarianceSource,
    MappingCovarianceSource,
)
from .errors import (
    BinResolutionError,
    CovarianceMatrixError,
    CovarianceSourceError,
    SmearedTrackError,
    SmearingConfigError,
)
from .gaussian import GaussianSource, NormalSampler
from .models import (
    EventInput,
    InputTrack,
    LorentzVector,
    SmearedEvent,
    SmearedTrack,
    TrackParameters,
    TruthParticle,
)
from .smearer import TrackSmearer

__all__ = [
    "TrackSmearer",
    "BinTable",
    "covariance_key",
    "CovarianceBank",
    "CholeskyCache",
    "CovarianceSource",
    "MappingCovarianceSource",
    "JsonCovarianceSource",
    "GaussianSource",
    "NormalSampler",
    "SmearingConfig",
    "encode_track_parameters",
    "decode_track_parameters",
    "DecodedTrack",
    "LorentzVector",
    "TrackParameters",
    "TruthParticle",
    "InputTrack",
    "SmearedTrack",
    "EventInput",
    "SmearedEvent",
    "SmearingConfigError",
    "CovarianceSourceError",
    "CovarianceMatrixError",
    "BinResolutionError",
    "SmearedTrackError",
]
