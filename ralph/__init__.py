"""Ralph tools: Reverse Ralph ticket planning and the single-feature Ralph loop.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

__version__ = "0.1.0"
