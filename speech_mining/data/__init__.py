"""
Corpus loading utilities.

This subpackage provides:
- functions to load the speech corpus with derived year/decade columns
- loading of the annotated passages used for classification.
"""
