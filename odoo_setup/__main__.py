from odoo_setup.pipeline import main

main()
