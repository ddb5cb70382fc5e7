"""
lexscope: an R-flavoured interpreter built to show lexical scoping at work.
"""
