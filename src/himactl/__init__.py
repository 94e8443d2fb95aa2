"""himactl: download the latest Himawari-8 full-disk image.

The full-disk image is published as a grid of 550px PNG tiles. himactl resolves
the latest acquisition time, downloads every tile of the requested level in
parallel, stitches them (with optional margins) into one image and stores it,
optionally setting it as desktop wallpaper.

Example:
    >>> from pathlib import Path
    >>> from himactl.fetchers import HTTPTileFetcher
    >>> from himactl.metadata import MetadataResolver
    >>> from himactl.model import ResolutionLevel
    >>> from himactl.pipeline import Pipeline
    >>>
    >>> pipeline = Pipeline(
    ...     MetadataResolver(),
    ...     HTTPTileFetcher(),
    ...     level=ResolutionLevel.L4,
    ...     output_dir=Path("outputs"),
    ... )
    >>> result = pipeline.run()
    >>> result.target.path
"""
