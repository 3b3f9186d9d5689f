"""
Template render driver.

Rendering parses the template, generates a Bud function whose parameters
are the argument names, compiles it into a fresh evaluator with the
configured encoder bound to `encode`, pushes the argument values and calls
the function. Nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .codegen.bud_source import ENCODE_FUNCTION_NAME
from .encoding import EncodeFunction, Encoder, HtmlEncoding, NoEncoding, get_encoder
from .runtime import values
from .runtime.vm import Bud
from .template import Template, parse_template
from .utils.config import BudplateConfig, get_config
from .utils.debug_artifacts import get_debug_manager
from .utils.exceptions import ArgumentError, CompileError, RuntimeFault, TemplateError
from .utils.logging import RenderLogger

render_logger = RenderLogger(__name__)

MODULE_NAME = "template"
# Vtable slot 0 is the module body; the generated function is the first function
RENDER_FUNCTION_INDEX = 1

Arguments = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def _split_arguments(args: Arguments) -> Tuple[List[str], List[Any]]:
    """Split render arguments into parameter names and values, preserving order."""
    items = args.items() if isinstance(args, Mapping) else args
    names: List[str] = []
    arg_values: List[Any] = []
    for name, value in items:
        if not isinstance(name, str):
            raise TypeError(f"Argument names must be str, not {type(name).__name__}")
        if not values.is_value(value):
            raise ArgumentError(name, value)
        names.append(name)
        arg_values.append(value)
    return names, arg_values


class Configuration:
    """
    Per-call render settings: the encoder applied to `{{= ... }}` output
    and the `auto_trim` flag.

    `auto_trim` is carried through the builders but is not consulted when
    trimming whitespace; only explicit `-` markers trim.
    """

    def __init__(self, encoder: Optional[Encoder] = None, auto_trim: bool = False):
        self.encoder = encoder if encoder is not None else NoEncoding()
        self.auto_trim = auto_trim

    @classmethod
    def for_html(cls) -> 'Configuration':
        return cls(HtmlEncoding())

    @classmethod
    def from_config(cls, config: Optional[BudplateConfig] = None) -> 'Configuration':
        """Build a configuration from the ambient settings."""
        config = config or get_config()
        return cls(get_encoder(config.render.default_encoder), config.render.auto_trim)

    def with_auto_trim(self) -> 'Configuration':
        return Configuration(self.encoder, auto_trim=True)

    def with_encoder(self, encoder: Encoder) -> 'Configuration':
        return Configuration(encoder, self.auto_trim)

    def render(self, template: Union[str, Template]) -> str:
        return self.render_with(template, ())

    def render_with(self, template: Union[str, Template], args: Arguments) -> str:
        """
        Render a template with named arguments.

        Args:
            template: Template text or Template
            args: Mapping or ordered (name, value) pairs; values must be
                None, bool, int, float or str

        Returns:
            The rendered text

        Raises:
            TemplateError: If the template markers are malformed
            CompileError: If an embedded statement or expression is not valid Bud
            RuntimeFault: If the generated program faults
            ArgumentError: If an argument value has an unsupported type
        """
        source = template.source if isinstance(template, Template) else template
        names, arg_values = _split_arguments(args)
        render_logger.log_render_start(len(source), names)

        try:
            parsed = parse_template(source)
        except TemplateError as e:
            render_logger.log_template_error(e)
            raise
        render_logger.log_parse_result(len(parsed.segments))

        config = get_config()
        function_name = config.render.function_name
        program = parsed.to_bud_source(function_name, names)
        render_logger.log_generated_source(function_name, program)
        if config.is_debug_enabled():
            get_debug_manager().save_bud_source(function_name, program)

        bud = Bud(config.runtime.max_call_depth)
        bud.register_native_function(ENCODE_FUNCTION_NAME, EncodeFunction(self.encoder))

        try:
            bud.compile(MODULE_NAME, program)
        except CompileError as e:
            render_logger.log_template_error(e)
            raise

        bud.stack.extend(arg_values)
        try:
            result = bud.invoke(RENDER_FUNCTION_INDEX, len(arg_values))
        except RuntimeFault as e:
            render_logger.log_fault(e)
            raise

        if not isinstance(result, str):
            fault = RuntimeFault.type_mismatch(
                f"Template returned {values.type_name(result)} instead of String",
                values.type_name(result),
            )
            render_logger.log_fault(fault)
            raise fault
        return result

    def __repr__(self) -> str:
        return f"Configuration(encoder={self.encoder!r}, auto_trim={self.auto_trim})"


def render(
    template: Union[str, Template],
    encoder: Optional[Encoder] = None,
    args: Arguments = (),
) -> str:
    """Render `template` with `encoder` (no encoding by default) and `args`."""
    return Configuration(encoder).render_with(template, args)
