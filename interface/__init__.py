"""
Interface package: front ends that drive the talv engine.

Modules:
    uci  — Universal Chess Interface (UCI) protocol handler.
           Reads commands from stdin, writes responses to stdout.
           Can be run as a standalone script: python interface/uci.py
    play — Terminal game against the bot, moves typed in algebraic
           notation: python interface/play.py [--fen FEN] [--depth N]
"""
