"""Network monitors built on reporter_template"""
