"""
Frequency analysis of the speech corpus.

This subpackage provides:
- term and document frequencies, grouped and over time
- type/token statistics and vocabulary growth
- log-likelihood key term extraction
- the frequency analysis pipeline writing CSV reports.
"""
