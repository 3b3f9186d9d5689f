"""
Bud evaluator used to execute generated template programs.

Only the subset of Bud that templates need is implemented: functions,
assignment, conditionals, loops, arithmetic, comparisons, `as`
conversions and calls to Bud or native functions.
"""

from .parser import Parser, parse
from .vm import Bud, CompiledModule, NativeFunction, PoppedValues, ValueStack

__all__ = [
    'Bud',
    'CompiledModule',
    'NativeFunction',
    'PoppedValues',
    'ValueStack',
    'Parser',
    'parse',
]
