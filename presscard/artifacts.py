import os

ARTIFACT_EXTENSIONS = {'image': 'png', 'pdf': 'pdf'}


def artifact_filename(card_id, kind):
    return f'{card_id}.{ARTIFACT_EXTENSIONS[kind]}'


def write_local_outputs(output_dir, base_url, card_id, rendered):
    """
    Save the rendered PNG and PDF under output_dir.

    Returns:
        tuple: (image_url, pdf_url)
    """
    os.makedirs(output_dir, exist_ok=True)

    image_name = artifact_filename(card_id, 'image')
    pdf_name = artifact_filename(card_id, 'pdf')

    with open(os.path.join(output_dir, image_name), 'wb') as f:
        f.write(rendered.image)
    with open(os.path.join(output_dir, pdf_name), 'wb') as f:
        f.write(rendered.document)

    base_url = base_url.rstrip('/')
    return f'{base_url}/generated/{image_name}', f'{base_url}/generated/{pdf_name}'
