"""
Tabular data loader for the hypothesis testing explorer.

This module turns an uploaded file into a DatasetHandle. It supports
delimited text (CSV/TSV) with separator and encoding detection and Excel
workbooks, plus an optional JSON metadata file declaring each column's
variable type.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union, Tuple
import pandas as pd
import chardet

from .models import DatasetHandle, VariableType


class DataLoader:
    """
    Data loader producing immutable DatasetHandle views.

    Supports:
    - CSV/TSV/TXT files with separator sniffing and encoding detection
    - Excel files (.xlsx, .xls), first sheet by default
    - JSON metadata files declaring column types
    """

    def __init__(self, encoding: str = 'auto'):
        """
        Initialize the DataLoader.

        Parameters
        ----------
        encoding : str, default 'auto'
            Text encoding for file reading. 'auto' enables detection.
        """
        self.encoding = encoding
        self.logger = logging.getLogger(__name__)

        # File format handlers
        self._handlers = {
            '.csv': self._load_csv,
            '.tsv': self._load_csv,
            '.txt': self._load_csv,
            '.xlsx': self._load_excel,
            '.xls': self._load_excel,
        }

    @property
    def supported_extensions(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    def load_data(self,
                  file_path: Union[str, Path],
                  metadata_path: Optional[Union[str, Path]] = None,
                  column_types: Optional[Dict[str, Union[str, VariableType]]] = None,
                  **kwargs) -> DatasetHandle:
        """
        Load a dataset from file with automatic format detection.

        Parameters
        ----------
        file_path : str or Path
            Path to the data file
        metadata_path : str or Path, optional
            Path to a JSON file declaring column types
        column_types : dict, optional
            Declared types by column name; takes precedence over metadata
        **kwargs
            Additional arguments passed to the pandas reader

        Returns
        -------
        DatasetHandle
            Immutable view over the loaded table
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Data file not found: {file_path}")

        extension = file_path.suffix.lower()

        if extension not in self._handlers:
            raise ValueError(f"Unsupported file format: {extension}")

        self.logger.info(f"Loading data from {file_path} (format: {extension})")

        handler = self._handlers[extension]
        data = handler(file_path, **kwargs)

        declared = {}
        if metadata_path:
            declared.update(self._load_metadata(metadata_path))
        if column_types:
            declared.update(column_types)

        dataset = DatasetHandle.from_dataframe(data, column_types=declared, source=file_path.name)

        self.logger.info(f"Loaded {dataset.n_rows} records with {len(dataset.column_names)} variables")

        return dataset

    def _load_csv(self, file_path: Path, **kwargs) -> pd.DataFrame:
        """Load CSV/TSV files with encoding detection."""
        sep = kwargs.pop('sep', None)
        if sep is None:
            if file_path.suffix.lower() == '.tsv':
                sep = '\t'
            else:
                sep = self._detect_separator(file_path)

        encoding = self.encoding
        if encoding == 'auto':
            encoding = self._detect_encoding(file_path)

        try:
            return pd.read_csv(file_path, sep=sep, encoding=encoding, **kwargs)
        except UnicodeDecodeError:
            for fallback_encoding in ['utf-8', 'latin-1', 'cp1252']:
                try:
                    data = pd.read_csv(file_path, sep=sep, encoding=fallback_encoding, **kwargs)
                    self.logger.warning(f"Used fallback encoding: {fallback_encoding}")
                    return data
                except UnicodeDecodeError:
                    continue
            raise ValueError("Could not decode file with any supported encoding")

    def _load_excel(self, file_path: Path, **kwargs) -> pd.DataFrame:
        """Load the first (or requested) sheet of an Excel workbook."""
        sheet_name = kwargs.pop('sheet_name', 0)
        if sheet_name is None:
            raise ValueError("Load one sheet at a time; pass a sheet name or index")
        return pd.read_excel(file_path, sheet_name=sheet_name, **kwargs)

    def _detect_separator(self, file_path: Path) -> str:
        """Detect CSV separator by examining the first line."""
        with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
            sample = f.readline()

        separators = [',', ';', '\t', '|']
        counts = {sep: sample.count(sep) for sep in separators}

        # Single-column files have no separator at all
        if not any(counts.values()):
            return ','
        return max(counts.items(), key=lambda x: x[1])[0]

    def _detect_encoding(self, file_path: Path) -> str:
        """Detect file encoding with chardet."""
        with open(file_path, 'rb') as f:
            raw_data = f.read(10000)
        result = chardet.detect(raw_data)
        encoding = result['encoding'] or 'utf-8'
        # Pure ASCII is a subset of UTF-8; prefer the wider codec
        if encoding.lower() == 'ascii':
            encoding = 'utf-8'
        return encoding

    def _load_metadata(self, metadata_path: Union[str, Path]) -> Dict[str, VariableType]:
        """Load declared column types from a JSON metadata file."""
        with open(metadata_path, 'r', encoding='utf-8') as f:
            metadata_dict = json.load(f)

        declared = {}
        for var_name, var_info in metadata_dict.get('variables', {}).items():
            if isinstance(var_info, str):
                declared[var_name] = VariableType.from_label(var_info)
            else:
                declared[var_name] = VariableType.from_label(var_info.get('type', 'Cualitativa'))

        self.logger.debug(f"Declared types for {len(declared)} variables from {metadata_path}")

        return declared
