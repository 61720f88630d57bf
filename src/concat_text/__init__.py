"""concat_text

A text-append stage for flowfile pipelines, plus the small in-process host
that loads, configures and drives it.

Public API surface:
- concat_text.cli.main : CLI entrypoint
- concat_text.pipeline.build.build_local / run_processor : run the stage
- concat_text.stages : the ConcatText processor and the processor registry
- concat_text.sources / concat_text.writers : where flowfiles come from and go to
"""
__all__ = ["__version__"]
__version__ = "0.1.0"
