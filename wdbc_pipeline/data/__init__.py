from wdbc_pipeline.data.loader import DatasetLoader, encode_diagnosis
from wdbc_pipeline.data.splitter import Split, StratifiedSplitter

__all__ = ["DatasetLoader", "encode_diagnosis", "Split", "StratifiedSplitter"]
