"""Model layer for node-based data-flow graphs: models, delegates, styles, geometry, scenes and paths."""

__version__ = "0.1.0"