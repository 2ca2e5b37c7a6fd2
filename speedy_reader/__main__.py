"""Package entry point for ``python -m speedy_reader``.

HOW: Checks sys.argv for the ``--gui`` flag. If present, launches the
Tkinter reader. Otherwise, delegates to the CLI's main() function.
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from speedy_reader.gui import main as gui_main
        gui_main()
    else:
        from speedy_reader.cli import main
        main()
