"""
Evaluation utilities.

This subpackage offers:
- F-measure for a chosen positive class
- accuracy, precision, recall, and confusion matrix computation.
"""
