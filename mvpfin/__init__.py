"""Core modules for the MVPfin service report application."""

from . import auth, insights, markers, models, report, settings, store, summarize, utils, viz

__all__ = [
	"auth",
	"insights",
	"markers",
	"models",
	"report",
	"settings",
	"store",
	"summarize",
	"utils",
	"viz",
]
