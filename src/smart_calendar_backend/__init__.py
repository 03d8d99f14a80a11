'''
Smart Calendar backend: the interval model, schedule engine and API behind
the weekly scheduling grid.
'''
__version__ = "0.2.0"
