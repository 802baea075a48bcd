"""
Breast tumour diagnosis pipeline.

Loads the Wisconsin diagnostic FNA measurements, prunes correlated and
multicollinear features, fits logistic regression, stepwise-AIC logistic
regression and a random forest on a stratified split, and compares them by
ROC/AUC on held-out rows.

DISCLAIMER: This is a statistical research tool for a publicly available
dataset. It does NOT provide medical diagnoses or replace professional
medical advice.
"""

__version__ = "0.1.0"
