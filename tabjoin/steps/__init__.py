"""
Pipeline steps.

Importing this package registers every built-in step type with the step
registry.
"""

from tabjoin.steps.base import RunContext, Step
from tabjoin.steps.registry import StepRegistry, get_registry, register_step
from tabjoin.steps.load import LoadStep
from tabjoin.steps.join import LeftJoinStep, NaturalJoinStep
from tabjoin.steps.filters import ExcludeFilterStep, IncludeFilterStep, MergeFilterStep
from tabjoin.steps.match import MatchMode, MatchStep
from tabjoin.steps.classify import ClassifyStep, ClassLimit
from tabjoin.steps.analyze import AnalyzeStep
from tabjoin.steps.pick import PickStep
from tabjoin.steps.save import ConfusionSaveStep, ExcelSaveStep, FlatSaveStep, HtmlSaveStep

__all__ = [
    'RunContext',
    'Step',
    'StepRegistry',
    'get_registry',
    'register_step',
    'LoadStep',
    'NaturalJoinStep',
    'LeftJoinStep',
    'IncludeFilterStep',
    'ExcludeFilterStep',
    'MergeFilterStep',
    'MatchMode',
    'MatchStep',
    'ClassifyStep',
    'ClassLimit',
    'AnalyzeStep',
    'PickStep',
    'FlatSaveStep',
    'ExcelSaveStep',
    'HtmlSaveStep',
    'ConfusionSaveStep',
]
