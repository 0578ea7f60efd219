"""
Same as the `subtle` command:

    py -m subtle -h

will explain all the arguments.
"""
from .cmdline import main

main()
