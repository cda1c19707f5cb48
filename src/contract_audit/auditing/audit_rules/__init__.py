"""Static prompt texts packaged with the analyzer."""
