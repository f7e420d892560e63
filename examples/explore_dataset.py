"""
Example session with the SmartStats explorer.

This example walks through the full workflow: loading a dataset with
declared variable types, running normality, group comparison and
association tests, switching the significance level and writing a report.
"""

import json

import pandas as pd
import numpy as np
import matplotlib
matplotlib.use('Agg')

from SmartStats import SmartStatsExplorer


def create_sample_data():
    """Create a sample dataset for demonstration."""
    np.random.seed(42)
    n_patients = 300

    treatment = np.random.choice(['placebo', 'dosis_baja', 'dosis_alta'], n_patients)
    effect = pd.Series(treatment).map({'placebo': 0.0, 'dosis_baja': 4.0, 'dosis_alta': 9.0}).values

    data = {
        'paciente': range(1, n_patients + 1),
        'edad': np.random.normal(45, 12, n_patients).round().clip(18, 90),
        'sexo': np.random.choice(['F', 'M'], n_patients),
        'tratamiento': treatment,
        'presion_reduccion': np.random.normal(10, 6, n_patients) + effect,
        'tiempo_recuperacion': np.random.exponential(14, n_patients).round(1),
        'fumador': np.random.choice(['si', 'no'], n_patients, p=[0.3, 0.7]),
        'mejoria': np.where(effect + np.random.normal(0, 5, n_patients) > 4, 'si', 'no'),
        'nivel_dolor': np.random.choice([1, 2, 3, 4, 5], n_patients),
    }

    return pd.DataFrame(data)


def create_sample_metadata():
    """Declared types; the pain scale is coded as numbers but is qualitative."""
    return {
        'variables': {
            'paciente': {'type': 'Cualitativa'},
            'nivel_dolor': {'type': 'Cualitativa'},
        }
    }


def show(report):
    """Print the parts of a report a front end would display."""
    print(f"   - Resumen de la prueba: {report.test_summary}")
    if report.has_result:
        print(report.raw_output)
        print(f"   - Interpretación: {report.interpretation}")
    else:
        print(f"   - {report.message}")


def main():
    """Run the example session."""
    print("=" * 60)
    print("SMARTSTATS HYPOTHESIS TESTING EXAMPLE")
    print("=" * 60)

    # Step 1: Create sample data and metadata
    print("\n1. Creating sample data...")
    data = create_sample_data()
    data.to_csv('sample_clinical_data.csv', index=False)
    with open('sample_clinical_metadata.json', 'w', encoding='utf-8') as f:
        json.dump(create_sample_metadata(), f, indent=2)

    print(f"   - {len(data)} records, {len(data.columns)} variables")
    print("   - Data saved to 'sample_clinical_data.csv'")

    # Step 2: Load
    print("\n2. Loading the dataset...")
    explorer = SmartStatsExplorer(log_level='WARNING')
    dataset = explorer.load_dataset('sample_clinical_data.csv', 'sample_clinical_metadata.json')

    for name in dataset.column_names:
        print(f"   - {name}: {dataset.column_type(name).value}")
    print(explorer.preview(5))

    # Step 3: Normality
    print("\n3. Normality of blood pressure reduction (Shapiro-Wilk)...")
    explorer.select('presion_reduccion', test="Shapiro-Wilk")
    print(explorer.describe_variable())
    show(explorer.run())

    print("\n   Recovery time (Lilliefors and Kolmogorov-Smirnov)...")
    for test in ["Lilliefors", "Kolmogorov-Smirnov"]:
        explorer.select('tiempo_recuperacion', test=test)
        show(explorer.run())

    # Step 4: Group comparisons
    print("\n4. Comparing groups...")
    explorer.select('presion_reduccion', "Ninguna", "t-Student")
    show(explorer.run())

    explorer.select('presion_reduccion', 'sexo', "t-Student")
    show(explorer.run())

    explorer.select('presion_reduccion', 'tratamiento', "ANOVA")
    show(explorer.run())
    explorer.diagnostic_plots.save(explorer.plot(), 'anova_boxplot.png')
    print("   - Boxplot saved to 'anova_boxplot.png'")

    # Step 5: Association
    print("\n5. Association between treatment and improvement (Chi-cuadrado)...")
    explorer.select('mejoria', 'tratamiento', "Chi-cuadrado")
    print(explorer.describe_variable())
    show(explorer.run())

    # A numeric column must be declared qualitative first
    explorer.select('edad', 'sexo', "Chi-cuadrado")
    show(explorer.run())

    # Step 6: Significance level
    print("\n6. Stricter significance level...")
    explorer.select('presion_reduccion', 'sexo', "t-Student")
    explorer.run()
    explorer.set_alpha(0.01)
    show(explorer.refresh())

    # Step 7: Report
    print("\n7. Writing report...")
    report_path = explorer.generate_report('smartstats_report.html')
    print(f"   - Report saved to '{report_path}'")

    print("\n" + "=" * 60)
    print("SESSION SUMMARY")
    print("=" * 60)
    for key, value in explorer.get_analysis_summary().items():
        print(f"   - {key}: {value}")

    return explorer


if __name__ == "__main__":
    main()
