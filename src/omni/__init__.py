"""omni - interactive system maintenance and tool installer.

Browse installed programs, fonts, network interfaces and open ports, and
install common developer tools through the host's package manager.
"""

__version__ = "0.4.0"
