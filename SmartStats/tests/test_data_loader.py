"""
Tests for data loading and the dataset handle.
"""

import json
import os
import shutil
import tempfile
import unittest
import numpy as np
import pandas as pd

from SmartStats.data_processing import DataLoader, DatasetHandle, VariableType
from SmartStats.data_processing.models import infer_variable_type


class TestDataLoader(unittest.TestCase):
    """Test cases for DataLoader."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.loader = DataLoader()
        self.sample_data = pd.DataFrame({
            'edad': [23, 35, 41, 29, 52],
            'ingreso': [1200.5, 2300.0, 1800.25, 950.0, 3100.75],
            'region': ['norte', 'sur', 'sur', 'este', 'norte'],
            'nivel': [1, 2, 2, 3, 1],
        })

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def path(self, name):
        return os.path.join(self.temp_dir, name)

    def test_load_csv(self):
        """Test CSV loading with inferred types."""
        csv_path = self.path('datos.csv')
        self.sample_data.to_csv(csv_path, index=False)

        dataset = self.loader.load_data(csv_path)

        self.assertIsInstance(dataset, DatasetHandle)
        self.assertEqual(dataset.n_rows, 5)
        self.assertEqual(dataset.column_names, ['edad', 'ingreso', 'region', 'nivel'])
        self.assertEqual(dataset.source, 'datos.csv')
        self.assertEqual(dataset.column_type('ingreso'), VariableType.QUANTITATIVE)
        self.assertEqual(dataset.column_type('region'), VariableType.QUALITATIVE)

    def test_separator_detection(self):
        """Test semicolon and tab separated files."""
        semicolon_path = self.path('datos.csv')
        self.sample_data.to_csv(semicolon_path, index=False, sep=';')
        dataset = self.loader.load_data(semicolon_path)
        self.assertEqual(len(dataset.column_names), 4)

        tsv_path = self.path('datos.tsv')
        self.sample_data.to_csv(tsv_path, index=False, sep='\t')
        dataset = self.loader.load_data(tsv_path)
        self.assertEqual(len(dataset.column_names), 4)

    def test_latin1_file(self):
        """Test a non UTF-8 file is decoded."""
        csv_path = self.path('acentos.csv')
        with open(csv_path, 'wb') as f:
            f.write("nombre;edad\nJosé;30\nMaría;25\nÁngel;41\n".encode('latin-1'))

        dataset = self.loader.load_data(csv_path)
        self.assertEqual(dataset.column_names, ['nombre', 'edad'])
        self.assertEqual(dataset.n_rows, 3)

    def test_load_excel(self):
        """Test Excel loading."""
        excel_path = self.path('datos.xlsx')
        self.sample_data.to_excel(excel_path, index=False)

        dataset = self.loader.load_data(excel_path)
        self.assertEqual(dataset.n_rows, 5)
        self.assertEqual(dataset.column_type('edad'), VariableType.QUANTITATIVE)

        with self.assertRaises(ValueError):
            self.loader.load_data(excel_path, sheet_name=None)

    def test_metadata_types(self):
        """Test declared types from a metadata file override inference."""
        csv_path = self.path('datos.csv')
        self.sample_data.to_csv(csv_path, index=False)
        metadata_path = self.path('metadata.json')
        with open(metadata_path, 'w', encoding='utf-8') as f:
            json.dump({'variables': {'nivel': {'type': 'Cualitativa'}, 'edad': 'Cuantitativa'}}, f)

        dataset = self.loader.load_data(csv_path, metadata_path)
        self.assertEqual(dataset.column_type('nivel'), VariableType.QUALITATIVE)
        self.assertEqual(dataset.column_type('edad'), VariableType.QUANTITATIVE)

        # Explicit declarations win over metadata
        dataset = self.loader.load_data(csv_path, metadata_path, column_types={'nivel': 'Cuantitativa'})
        self.assertEqual(dataset.column_type('nivel'), VariableType.QUANTITATIVE)

    def test_missing_and_unsupported_files(self):
        """Test error handling for bad paths."""
        with self.assertRaises(FileNotFoundError):
            self.loader.load_data(self.path('no_existe.csv'))

        sav_path = self.path('datos.sav')
        with open(sav_path, 'w') as f:
            f.write('x')
        with self.assertRaises(ValueError):
            self.loader.load_data(sav_path)

        self.assertIn('.xlsx', self.loader.supported_extensions)


class TestDatasetHandle(unittest.TestCase):
    """Test cases for DatasetHandle."""

    def setUp(self):
        """Set up test fixtures."""
        self.frame = pd.DataFrame({
            'peso': [60.5, 72.1, np.nan, 80.3],
            'sexo': ['F', 'M', 'F', 'M'],
            'fumador': [True, False, False, True],
        })

    def test_type_inference(self):
        """Test default types proposed from dtypes."""
        self.assertEqual(infer_variable_type(self.frame['peso']), VariableType.QUANTITATIVE)
        self.assertEqual(infer_variable_type(self.frame['sexo']), VariableType.QUALITATIVE)
        self.assertEqual(infer_variable_type(self.frame['fumador']), VariableType.QUALITATIVE)

    def test_type_labels(self):
        """Test accepted variable type labels."""
        self.assertEqual(VariableType.from_label("Cuantitativa"), VariableType.QUANTITATIVE)
        self.assertEqual(VariableType.from_label("categorical"), VariableType.QUALITATIVE)
        self.assertEqual(VariableType.from_label(VariableType.QUALITATIVE), VariableType.QUALITATIVE)
        with self.assertRaises(ValueError):
            VariableType.from_label("ordinal")

    def test_handle_is_isolated(self):
        """Test the handle does not share data with the caller."""
        dataset = DatasetHandle.from_dataframe(self.frame)
        self.frame.loc[0, 'peso'] = 999.0
        self.assertEqual(dataset.data.loc[0, 'peso'], 60.5)

        column = dataset.column('peso')
        column.values.iloc[1] = -1.0
        self.assertEqual(dataset.column('peso').values.iloc[1], 72.1)
        self.assertEqual(column.n_missing, 1)

    def test_with_column_type(self):
        """Test redeclaring a column returns a new handle."""
        dataset = DatasetHandle.from_dataframe(self.frame)
        recoded = dataset.with_column_type('peso', "Cualitativa")

        self.assertEqual(recoded.column_type('peso'), VariableType.QUALITATIVE)
        self.assertEqual(dataset.column_type('peso'), VariableType.QUANTITATIVE)
        self.assertTrue(recoded.column('peso').is_qualitative())

        with self.assertRaises(KeyError):
            dataset.with_column_type('altura', "Cuantitativa")

    def test_invalid_frames(self):
        """Test duplicate names and declarations for unknown columns."""
        duplicated = pd.DataFrame([[1, 2]], columns=['a', 'a'])
        with self.assertRaises(ValueError):
            DatasetHandle.from_dataframe(duplicated)

        with self.assertRaises(ValueError):
            DatasetHandle.from_dataframe(self.frame, column_types={'altura': 'Cuantitativa'})

    def test_preview(self):
        """Test the preview is limited to the first rows."""
        dataset = DatasetHandle.from_dataframe(pd.DataFrame({'x': range(25)}))
        self.assertEqual(len(dataset.preview()), 10)
        self.assertEqual(len(dataset.preview(3)), 3)
        self.assertFalse(dataset.has_column(None))
        self.assertTrue(dataset.has_column('x'))

    def test_index_labels_dropped(self):
        """Test rows are renumbered when the caller's index repeats labels."""
        frame = pd.DataFrame({'x': range(20)}, index=[0, 1] * 10)
        dataset = DatasetHandle.from_dataframe(frame)
        self.assertIsInstance(dataset.data.index, pd.RangeIndex)
        self.assertEqual(dataset.data.loc[19, 'x'], 19)
        self.assertEqual(list(frame.index[:4]), [0, 1, 0, 1])


if __name__ == '__main__':
    unittest.main()
