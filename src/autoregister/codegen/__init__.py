from autoregister.codegen.classifier import ParameterClassifier
from autoregister.codegen.defaults import DefaultSynthesizer
from autoregister.codegen.generator import AccessorGenerator, BuildResult
from autoregister.codegen.planner import AccessorPlanner
from autoregister.codegen.renderer import AccessorRenderer

__all__ = [
    "AccessorGenerator",
    "AccessorPlanner",
    "AccessorRenderer",
    "BuildResult",
    "DefaultSynthesizer",
    "ParameterClassifier",
]
