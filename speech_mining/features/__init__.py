"""
Text preprocessing and feature extraction utilities.

This subpackage includes:
- text cleaning, tokenization, stopword removal, and stemming
- document-term matrix construction, weighting, and the persisted
  feature extractor used by the classifier.
"""
