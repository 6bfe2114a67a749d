__version__ = '0.1.0'
last_mod_date = 'October 18, 2026'
__description__ = 'Rule-based Moses-style tokenizer for machine translation pipelines'
