"""Device registry, sessions and command routing"""
