from .calculator import *
from .settings import *
