# File: src/rendering/renderer.py
"""
Abstract renderer interface.
"""
from abc import ABC, abstractmethod


class Renderer(ABC):
    @abstractmethod
    def attach(self, simulation):
        pass

    @abstractmethod
    def run(self, ticks=None):
        pass
