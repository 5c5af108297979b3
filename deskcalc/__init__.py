"""deskcalc — Desk calculator core: expression engine plus state machine.

Typed keys go in, a running display value comes out, with a ten-entry
history of evaluated expressions and a single memory register. Expressions
are parsed by a small recursive-descent parser; nothing is ever eval()'d.

Usage:
    python -m deskcalc eval "2+3*4"     # 14
    python -m deskcalc keys 2 + 3 =     # display 5, history "2+3 = 5"
    python -m deskcalc repl             # interactive
"""
