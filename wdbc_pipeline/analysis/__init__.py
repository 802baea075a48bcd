from wdbc_pipeline.analysis.explorer import DataExplorer

__all__ = ["DataExplorer"]
