"""
Resolution Models
=================
Additive resolution models and the density/integration machinery they plug
into.

Exports:
    AddModel: Composite of N resolution models and N-1 coefficients.
    GaussModel, TruthModel: Elementary resolution models.
    DecayPdf, ConvolutedPdf: Densities convolved with a resolution model.
    RealVariable, Constant, Formula, BasisFunction, DecayType: Graph nodes.
"""
from resolutionmodels.core.basis import BasisFunction, DecayType
from resolutionmodels.core.node import Constant, Formula, RealNode, RealVariable
from resolutionmodels.core.pdf import AbsPdf
from resolutionmodels.errors import ConfigurationError, ProgrammingError, ResolutionModelError
from resolutionmodels.integration.integral import RealIntegral
from resolutionmodels.integration.registry import IntegrationCodeRegistry
from resolutionmodels.models.add_model import AddModel
from resolutionmodels.models.gauss_model import GaussModel
from resolutionmodels.models.resolution_model import ResolutionModel
from resolutionmodels.models.truth_model import TruthModel
from resolutionmodels.pdfs.convoluted_pdf import ConvolutedPdf, DecayPdf

__all__ = [
    "AbsPdf",
    "AddModel",
    "BasisFunction",
    "ConfigurationError",
    "Constant",
    "ConvolutedPdf",
    "DecayPdf",
    "DecayType",
    "Formula",
    "GaussModel",
    "IntegrationCodeRegistry",
    "ProgrammingError",
    "RealIntegral",
    "RealNode",
    "RealVariable",
    "ResolutionModel",
    "ResolutionModelError",
    "TruthModel",
]
