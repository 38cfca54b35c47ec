from profile_pdf.web import launch

launch()
