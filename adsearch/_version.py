__version__ = "0.1.0"
__author__ = [
	"adsearch contributors"
]

BANNER = "adsearch v{} - by {}\n".format(__version__, ", ".join(__author__))
