"""contrast_checker.core: foundation layer.

Colour arithmetic, colour-range merging, the element hierarchy, swatch
extraction, configuration and reports. Nothing here imports
contrast_checker.evaluation, contrast_checker.techniques or
contrast_checker.registry.
"""

from contrast_checker.core.log import configure_library_defaults

configure_library_defaults()
