"""
NTSB Narrative Features - Test Suite

Test modules organized by functionality:
- unit/preprocessing/ - Narrative normalizer tests
- unit/features/ - Document-term matrix, TF-IDF, Gibbs LDA, perplexity, pipeline tests
- unit/ - Configuration and parallel processing tests
"""
